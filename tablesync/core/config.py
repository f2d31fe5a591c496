"""
Configuracion central de tablesync.
Gestiona variables de entorno y credenciales de integraciones.

No existe una instancia global: `get_settings()` construye el objeto una
vez en el punto de entrada y se pasa explicitamente a cada componente.
"""
from pydantic_settings import BaseSettings
from pydantic import Field, computed_field


class Settings(BaseSettings):
    """
    Clase de configuracion de la aplicacion.
    Lee variables de entorno (y `.env`) y proporciona valores por defecto.
    
    Backends de almacenamiento:
    - STORAGE_BACKEND=memory: tablas en memoria del proceso (dev/tests)
    - STORAGE_BACKEND=postgres: tablas persistidas en Postgres (DATABASE_URL)
    """
    
    # Configuracion de la aplicacion
    APP_NAME: str = Field(default="tablesync")
    ENVIRONMENT: str = Field(default="production")
    
    # Logging
    LOG_LEVEL: str = Field(default="INFO")
    LOG_FILE: str = Field(default="")
    
    # Almacenamiento
    STORAGE_BACKEND: str = Field(default="memory")
    DATABASE_URL: str = Field(default="")
    
    # Presentacion de tablas
    DEFAULT_ROW_HEIGHT: int = Field(default=21)
    DEFAULT_POSITION: str = Field(default="bottom")
    # Columna cuyo texto se intenta parsear como JSON en consultas "data"
    MESSAGE_COLUMN: str = Field(default="Message")
    
    # Notion
    NOTION_TOKEN: str = Field(default="")
    NOTION_VERSION: str = Field(default="2022-06-28")
    NOTION_BASE_URL: str = Field(default="https://api.notion.com/v1")
    NOTION_TIMEOUT_S: int = Field(default=30)
    NOTION_MAX_RETRIES: int = Field(default=6)
    NOTION_PAGE_SIZE: int = Field(default=100)
    
    @computed_field
    @property
    def uses_postgres(self) -> bool:
        """Indica si el backend configurado es Postgres."""
        return self.STORAGE_BACKEND.lower() == "postgres"
    
    @computed_field
    @property
    def is_development(self) -> bool:
        """Indica si el entorno es de desarrollo."""
        return self.ENVIRONMENT.lower() == "development"
    
    class Config:
        """Configuracion de Pydantic."""
        env_file = ".env"
        case_sensitive = True
        extra = "ignore"  # Ignorar campos extra del .env


def get_settings(**overrides) -> Settings:
    """
    Construye la configuracion leyendo el entorno.

    Los overrides explicitos tienen prioridad sobre las variables de entorno.
    """
    return Settings(**overrides)
