"""Pytest fixtures for service and API tests."""

from collections.abc import AsyncGenerator, Generator

import httpx
import pytest
import pytest_asyncio
from fastapi.testclient import TestClient
from sqlalchemy import create_engine, delete
from sqlalchemy.orm import Session, sessionmaker
from sqlalchemy.pool import StaticPool

from xenolexia.api import deps
from xenolexia.db.base import Base
from xenolexia.db.models import VocabularyItem, WordListEntry
from xenolexia.main import create_app
from xenolexia.services.translation_index import TranslationIndex
from xenolexia.services.word_list import WordListRepository


@pytest.fixture(scope="session")
def db_engine():
    engine = create_engine(
        "sqlite://",
        connect_args={"check_same_thread": False},
        poolclass=StaticPool,
    )
    Base.metadata.create_all(
        bind=engine,
        tables=[VocabularyItem.__table__, WordListEntry.__table__],
    )
    try:
        yield engine
    finally:
        Base.metadata.drop_all(
            bind=engine,
            tables=[WordListEntry.__table__, VocabularyItem.__table__],
        )


@pytest.fixture(autouse=True)
def clean_tables(db_engine) -> Generator[None, None, None]:
    try:
        yield
    finally:
        with db_engine.begin() as connection:
            connection.execute(delete(VocabularyItem))
            connection.execute(delete(WordListEntry))


@pytest.fixture()
def db_session(db_engine) -> Generator[Session, None, None]:
    TestingSessionLocal = sessionmaker(autocommit=False, autoflush=False, bind=db_engine)
    db = TestingSessionLocal()
    try:
        yield db
    finally:
        db.close()


@pytest.fixture()
def session_factory(db_engine) -> sessionmaker:
    return sessionmaker(autocommit=False, autoflush=False, bind=db_engine, expire_on_commit=False)


@pytest.fixture()
def translation_index(session_factory) -> TranslationIndex:
    return TranslationIndex(WordListRepository(session_factory))


@pytest.fixture()
def client(db_session: Session, translation_index: TranslationIndex) -> Generator[TestClient, None, None]:
    app = create_app()

    def override_get_db() -> Generator[Session, None, None]:
        yield db_session

    app.dependency_overrides[deps.get_db] = override_get_db
    app.dependency_overrides[deps.get_translation_index] = lambda: translation_index
    with TestClient(app) as test_client:
        yield test_client


@pytest_asyncio.fixture()
async def async_client(
    db_session: Session, translation_index: TranslationIndex
) -> AsyncGenerator[httpx.AsyncClient, None]:
    app = create_app()

    async def override_get_db() -> AsyncGenerator[Session, None]:
        yield db_session

    app.dependency_overrides[deps.get_db] = override_get_db
    app.dependency_overrides[deps.get_translation_index] = lambda: translation_index

    transport = httpx.ASGITransport(app=app)
    async with httpx.AsyncClient(transport=transport, base_url="http://testserver") as client:
        yield client


@pytest.fixture()
def spanish_word_list(db_session):
    rows = [
        WordListEntry(
            id="en_es_house",
            source_word="house",
            target_word="casa",
            source_lang="en",
            target_lang="es",
            proficiency="beginner",
            frequency_rank=120,
            part_of_speech="noun",
            variants=["houses"],
            pronunciation="KAH-sah",
        ),
        WordListEntry(
            id="en_es_cat",
            source_word="cat",
            target_word="gato",
            source_lang="en",
            target_lang="es",
            proficiency="beginner",
            frequency_rank=300,
            part_of_speech="noun",
            variants=["cats"],
        ),
        WordListEntry(
            id="en_es_river",
            source_word="river",
            target_word="río",
            source_lang="en",
            target_lang="es",
            proficiency="intermediate",
            frequency_rank=900,
            part_of_speech="noun",
        ),
        WordListEntry(
            id="en_es_go",
            source_word="go",
            target_word="ir",
            source_lang="en",
            target_lang="es",
            proficiency="beginner",
            frequency_rank=40,
            part_of_speech="verb",
            variants=["went", "goes", "gone"],
        ),
    ]
    db_session.add_all(rows)
    db_session.commit()
    try:
        yield rows
    finally:
        db_session.query(WordListEntry).delete()
        db_session.commit()
