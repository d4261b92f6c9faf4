from core.database import get_engine, init_db, make_session_factory
from core.ingestion import ReportIngestor

# Global instances, created once per process
engine = get_engine()
SessionLocal = make_session_factory(engine)
ingestor = ReportIngestor(SessionLocal)


def setup_database():
    init_db(engine)
