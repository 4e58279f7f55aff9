from xenolexia.db.base import Base
from xenolexia.db.session import engine
from xenolexia.db.models import VocabularyItem, WordListEntry  # noqa: F401  registers the tables

if __name__ == "__main__":
    print("Creating tables...")
    Base.metadata.create_all(bind=engine)
    print("Tables created.")
