"""
Composition root: builds the data source, repository and use cases from
settings and threads them through explicitly.
"""

import logging
from dataclasses import dataclass
from typing import Optional

from .config import Settings, settings as default_settings
from .repositories.card_repository import LocalCardRepository
from .services.local_card_data_source import LocalCardDataSource
from .usecases import AddCard, DeleteCard, GetCard, ListCards, UpdateCard

logger = logging.getLogger(__name__)


@dataclass
class AppContext:
    """Everything the UI layer needs, wired once at startup"""
    settings: Settings
    data_source: LocalCardDataSource
    repository: LocalCardRepository
    add_card: AddCard
    update_card: UpdateCard
    delete_card: DeleteCard
    list_cards: ListCards
    get_card: GetCard

    @classmethod
    def from_settings(cls, settings: Optional[Settings] = None) -> "AppContext":
        settings = settings or default_settings

        data_source = LocalCardDataSource(settings.db_path, echo=settings.echo_sql)
        repository = LocalCardRepository(data_source, export_indent=settings.export_indent)

        return cls(
            settings=settings,
            data_source=data_source,
            repository=repository,
            add_card=AddCard(repository),
            update_card=UpdateCard(repository),
            delete_card=DeleteCard(repository),
            list_cards=ListCards(repository),
            get_card=GetCard(repository),
        )

    async def start(self) -> None:
        """Configure logging and open the local store"""
        logging.basicConfig(
            level=getattr(logging, self.settings.log_level.upper(), logging.INFO),
            format='%(asctime)s - %(name)s - %(levelname)s - %(message)s'
        )
        logger.info(f"Starting {self.settings.app_name} {self.settings.app_version}")
        await self.data_source.initialize()

    async def close(self) -> None:
        await self.data_source.close()

    async def __aenter__(self) -> "AppContext":
        await self.start()
        return self

    async def __aexit__(self, exc_type, exc, tb) -> None:
        await self.close()
