# concierge_ai/__init__.py
"""
Agentic Concierge Package

Runtime behind the stays marketplace assistant:
- Knowledge base kept in sync from the rules file + live listings
- Tools exposed to the language model (SQL, cancellations, copy, email)
- Security gate in front of every data-touching tool
- Audited tool invocations (timed, logged, never blocking the caller)
- Parallel trip-planner enrichment with graceful degradation
"""

__version__ = "1.0.0"

# Package structure:
# concierge_ai/
# ├── __init__.py           <- This file
# ├── main.py               <- FastAPI application entry
# ├── config.py             <- Configuration settings
# ├── runtime.py            <- Wires every collaborator together
# │
# ├── agents/               <- Orchestration
# │   ├── security_gate.py  <- Data-access policy
# │   ├── pipeline.py       <- Tool registry + invocation audit
# │   ├── background.py     <- Tracked background tasks
# │   ├── trip_planner.py   <- Parallel enrichment workflow
# │   ├── trip_briefing.py  <- Pre-arrival briefing email
# │   └── concierge_agent.py <- Tool-calling chat agent
# │
# ├── tools/                <- Callable tools (one per module)
# │
# ├── knowledge/            <- Vector knowledge base
# │   ├── embeddings.py
# │   ├── redis_client.py
# │   ├── vector_store.py   <- Redis-backed vector database
# │   ├── knowledge_store.py
# │   ├── sources.py        <- Rules file + catalog documents
# │   ├── sync.py           <- Sync coordinator
# │   └── watcher.py        <- Rules file watcher (watchdog)
# │
# ├── llm/                  <- Prompts, chat providers, output cleanup
# ├── interfaces/           <- SQL, audit, email, travel data
# ├── schemas/              <- Pydantic models
# └── api/                  <- FastAPI routers
