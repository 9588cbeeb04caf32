from sqlalchemy import inspect

from src.photobox.config import load_config


def test_load_config_creates_schema_and_media_dirs(tmp_path, monkeypatch) -> None:
    monkeypatch.setenv("MEDIA_ROOT", str(tmp_path / "media"))
    monkeypatch.setenv("DOWNLOAD_DIR", str(tmp_path / "downloads"))
    monkeypatch.setenv("DATABASE_URL", f"sqlite:///{tmp_path / 'fresh.db'}")

    config = load_config()

    try:
        assert "templates" in inspect(config.engine).get_table_names()
        columns = {column["name"] for column in inspect(config.engine).get_columns("templates")}
        assert {"id", "name", "image_path", "layout_type", "config_json", "created_at", "updated_at"} <= columns
        assert config.media_paths.templates.is_dir()
        assert config.media_paths.downloads == tmp_path / "downloads"
        assert config.media_paths.downloads.is_dir()
    finally:
        config.engine.dispose()
