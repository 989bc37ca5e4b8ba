import os
from dotenv import load_dotenv

# Load .env file if it exists
load_dotenv()


class Settings:
    # -------------------------------------------------------
    # Project
    # -------------------------------------------------------
    PROJECT_NAME: str = "Just Label It"
    VERSION: str = "0.1.0"

    # -------------------------------------------------------
    # Database
    # -------------------------------------------------------
    # File name created inside the scanned directory
    DATABASE_NAME: str = os.getenv("JLI_DATABASE_NAME", "jli.db")

    # Full path override (takes precedence over DATABASE_NAME)
    DATABASE_PATH: str | None = os.getenv("JLI_DATABASE_PATH") or None

    # -------------------------------------------------------
    # Server
    # -------------------------------------------------------
    BIND: str = os.getenv("JLI_BIND", "127.0.0.1")
    PORT: int = int(os.getenv("JLI_PORT", 8000))

    # -------------------------------------------------------
    # Logging
    # -------------------------------------------------------
    LOG_LEVEL: str = os.getenv("JLI_LOG_LEVEL", "INFO")

    # -------------------------------------------------------
    # Labels
    # -------------------------------------------------------
    LABEL_SEARCH_LIMIT: int = int(os.getenv("JLI_LABEL_SEARCH_LIMIT", 10))

    def database_path_for(self, directory: str) -> str:
        """
        Resolve where the catalogue database lives for a scanned directory.
        """
        if self.DATABASE_PATH:
            return self.DATABASE_PATH
        return os.path.join(directory, self.DATABASE_NAME)


# Single instance that is imported everywhere
settings = Settings()
