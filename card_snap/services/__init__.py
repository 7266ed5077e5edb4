from .local_card_data_source import LocalCardDataSource

__all__ = [
    "LocalCardDataSource",
]
