"""
Concierge Runtime
Explicit wiring of every collaborator, in dependency order.
No container and no discovery: what is built here is what runs.
"""

from dataclasses import dataclass
from typing import Any, Dict, Optional

from loguru import logger

from .agents.background import BackgroundTaskGroup
from .agents.concierge_agent import ConciergeAgent
from .agents.pipeline import ToolInvocationPipeline, ToolRegistry
from .agents.security_gate import SecurityGate
from .agents.trip_briefing import TripBriefingWorkflow
from .agents.trip_planner import ParallelEnrichmentWorkflow
from .config import Settings, settings as default_settings
from .interfaces.audit_store import AuditSink, LogAuditSink, MySQLAuditSink
from .interfaces.catalog_source import MySQLCatalogSource
from .interfaces.email_sender import EmailSender, SmtpEmailSender
from .interfaces.mysql_database import MySQLDatabase
from .interfaces.sql_executor import ReadOnlyQueryExecutor, ScopedWriteExecutor
from .interfaces.travel_data import HotelSearchService, TripEnrichmentService
from .knowledge.embeddings import create_embedding_service
from .knowledge.knowledge_store import VectorKnowledgeStore
from .knowledge.redis_client import check_redis_health, get_redis_client
from .knowledge.sources import KnowledgeRulesFile
from .knowledge.sync import KnowledgeSyncCoordinator, SyncLock
from .knowledge.vector_store import RedisVectorDatabase
from .llm.chat_provider import ChatProvider, create_chat_provider
from .tools import (
    BookingManagerTool,
    CopywritingTool,
    DatabaseQueryTool,
    GeneralAssistantTool,
    GuestCommunicationTool,
    TripDiscoveryTool,
    register_tools
)


@dataclass
class ConciergeRuntime:
    """Everything the API needs, built once per process"""
    settings: Settings
    chat_provider: ChatProvider
    knowledge_store: VectorKnowledgeStore
    registry: ToolRegistry
    audit_tasks: BackgroundTaskGroup
    audit_sink: AuditSink
    coordinator: KnowledgeSyncCoordinator
    concierge: ConciergeAgent
    trip_planner: ParallelEnrichmentWorkflow
    trip_briefing: TripBriefingWorkflow
    email_sender: EmailSender
    database: Optional[MySQLDatabase] = None
    redis_client: Any = None
    
    async def health(self) -> Dict[str, Any]:
        """Dependency checks for the health endpoint"""
        return {
            "database": self.database is not None and await self.database.health_check(),
            "vector_db": self.redis_client is not None and await check_redis_health(self.redis_client),
            "embedding_model": self.knowledge_store.embeddings.model_info.get("model", "")
        }
    
    async def start(self, run_sync: bool = True):
        if isinstance(self.audit_sink, MySQLAuditSink):
            try:
                await self.audit_sink.ensure_table()
            except Exception as e:
                logger.warning(f"Audit table not ready, records will fail to persist: {e}")
        
        if run_sync:
            await self.coordinator.start()
    
    async def shutdown(self):
        await self.coordinator.stop()
        await self.audit_tasks.join(timeout=10)
        logger.info("Concierge runtime stopped")


def build_runtime(
    config: Optional[Settings] = None,
    chat_provider: Optional[ChatProvider] = None,
    email_sender: Optional[EmailSender] = None
) -> ConciergeRuntime:
    """
    Build the runtime from settings
    
    Args:
        config: Settings (defaults to the global instance)
        chat_provider: Override the chat backend
        email_sender: Override the email backend
    """
    config = config or default_settings
    
    # Storage
    main_db = MySQLDatabase(
        "concierge_rw",
        pool_size=config.DB_POOL_SIZE,
        config=config.get_mysql_config()
    )
    readonly_db = MySQLDatabase(
        "concierge_ro",
        read_only=True,
        pool_size=config.DB_POOL_SIZE,
        config=config.get_mysql_config(read_only=True)
    )
    reader = ReadOnlyQueryExecutor(readonly_db, row_limit=config.SQL_ROW_LIMIT)
    writer = ScopedWriteExecutor(main_db)
    
    # Knowledge
    redis_client = get_redis_client()
    embedder = create_embedding_service()
    knowledge_store = VectorKnowledgeStore(
        embedder,
        RedisVectorDatabase(redis_client),
        embedding_dim=embedder.embedding_dim,
        embed_timeout=config.EMBEDDING_TIMEOUT_SECONDS
    )
    coordinator = KnowledgeSyncCoordinator(
        knowledge_store,
        KnowledgeRulesFile(config.KNOWLEDGE_FILE_PATH),
        MySQLCatalogSource(readonly_db),
        SyncLock(),
        collection=config.KNOWLEDGE_COLLECTION,
        interval_seconds=config.SYNC_INTERVAL_SECONDS,
        initial_delay_seconds=config.SYNC_INITIAL_DELAY_SECONDS,
        debounce_seconds=config.SYNC_DEBOUNCE_SECONDS,
        page_size=config.CATALOG_PAGE_SIZE,
        task_group=BackgroundTaskGroup("knowledge-sync")
    )
    
    # Models and side effects
    chat_provider = chat_provider or create_chat_provider()
    email_sender = email_sender or SmtpEmailSender()
    
    # Tools, each call audited
    audit_sink: AuditSink = MySQLAuditSink(main_db)
    if config.AUDIT_SINK == "log":
        audit_sink = LogAuditSink()
    audit_tasks = BackgroundTaskGroup("audit")
    pipeline = ToolInvocationPipeline(audit_sink, audit_tasks)
    registry = ToolRegistry(middlewares=[pipeline.invoke])
    register_tools(
        registry,
        DatabaseQueryTool(reader, SecurityGate()),
        BookingManagerTool(reader, writer, email_sender),
        CopywritingTool(chat_provider),
        GeneralAssistantTool(
            chat_provider,
            knowledge_store,
            config.KNOWLEDGE_COLLECTION,
            search_limit=config.KNOWLEDGE_SEARCH_LIMIT,
            score_threshold=config.KNOWLEDGE_SCORE_THRESHOLD
        ),
        GuestCommunicationTool(email_sender),
        TripDiscoveryTool(chat_provider)
    )
    
    # Workflows
    concierge = ConciergeAgent(
        chat_provider,
        registry,
        knowledge_store,
        config.KNOWLEDGE_COLLECTION,
        search_limit=config.KNOWLEDGE_SEARCH_LIMIT,
        score_threshold=config.KNOWLEDGE_SCORE_THRESHOLD
    )
    trip_planner = ParallelEnrichmentWorkflow(
        registry,
        HotelSearchService(),
        timeout=config.LLM_TIMEOUT_SECONDS + config.HTTP_TIMEOUT_SECONDS
    )
    trip_briefing = TripBriefingWorkflow(reader, TripEnrichmentService(), chat_provider, registry)
    
    logger.info(f"Concierge runtime built: {len(registry.function_names)} tools registered")
    
    return ConciergeRuntime(
        settings=config,
        chat_provider=chat_provider,
        knowledge_store=knowledge_store,
        registry=registry,
        audit_tasks=audit_tasks,
        audit_sink=audit_sink,
        coordinator=coordinator,
        concierge=concierge,
        trip_planner=trip_planner,
        trip_briefing=trip_briefing,
        email_sender=email_sender,
        database=main_db,
        redis_client=redis_client
    )
