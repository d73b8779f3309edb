"""Training data ingestion."""

from cgp_evolve.data.training import TrainingData, read_training_data

__all__ = [
    "TrainingData",
    "read_training_data",
]
