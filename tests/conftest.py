import os
import tempfile
from pathlib import Path

import pytest
from sqlalchemy.orm import Session

# Point the app at a throwaway database before anything imports ``db``.
_TMP = Path(tempfile.mkdtemp(prefix="sku-tests-"))
os.environ["SKU_DATABASE_URL"] = f"sqlite:///{_TMP / 'test.sqlite3'}"
os.environ.pop("DISABLE_AUTO_SKU_GENERATION", None)

from app import create_app  # noqa: E402
from db import Base, SessionLocal, engine  # noqa: E402
from utils.catalog import Brand, Category, EquipmentModel, EquipmentUnit  # noqa: E402


@pytest.fixture(autouse=True)
def fresh_db(monkeypatch):
    monkeypatch.delenv("DISABLE_AUTO_SKU_GENERATION", raising=False)
    SessionLocal.remove()
    Base.metadata.drop_all(bind=engine)
    Base.metadata.create_all(bind=engine)
    yield
    SessionLocal.remove()


@pytest.fixture
def session():
    s = Session(bind=engine)
    try:
        yield s
    finally:
        s.close()


@pytest.fixture
def catalog(session):
    """Lighting category, one model, Chauvet and generic brands."""
    lighting = Category(name="Lighting", sku_prefix="LT")
    audio = Category(name="Audio", sku_prefix="AU")
    unprefixed = Category(name="Misc", sku_prefix=None)
    session.add_all([lighting, audio, unprefixed])
    session.flush()
    model = EquipmentModel(name="Rogue R2 Wash", category_id=lighting.id)
    bare_model = EquipmentModel(name="Mystery Box", category_id=unprefixed.id)
    chauvet = Brand(brand_name="chauvet", prefix="CHV", category="lighting")
    shure = Brand(brand_name="shure", prefix="SHU", category="audio")
    generic = Brand(brand_name="generic", prefix="GEN", category="general", is_default=True)
    retired = Brand(brand_name="oldco", prefix="OLD", is_active=False)
    session.add_all([model, bare_model, chauvet, shure, generic, retired])
    session.commit()
    return {
        "lighting": lighting.id,
        "audio": audio.id,
        "unprefixed": unprefixed.id,
        "model": model.id,
        "bare_model": bare_model.id,
        "chauvet": chauvet.id,
        "shure": shure.id,
        "generic": generic.id,
        "retired": retired.id,
    }


@pytest.fixture
def add_unit(session):
    def _add(sku):
        session.add(EquipmentUnit(sku=sku))
        session.commit()

    return _add


@pytest.fixture
def client(catalog):
    app = create_app()
    app.config["TESTING"] = True
    return app.test_client()
