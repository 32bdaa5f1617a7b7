"""
Configuration for Flowline Core
"""
import os
from pathlib import Path
from typing import Optional
from dotenv import load_dotenv

load_dotenv()


class Config:
    """Configuration class for Flowline Core"""

    # Mode: "solo" (local JSON storage) or "prod" (Supabase)
    MODE: str = os.getenv("FLOWLINE_CORE_MODE", "solo")

    # Storage configuration
    STORAGE_PATH: Optional[str] = os.getenv("FLOWLINE_CORE_STORAGE_PATH")
    if STORAGE_PATH is None:
        STORAGE_PATH = str(Path.home() / ".flowline-core" / "data")

    # Supabase configuration (for prod mode)
    SUPABASE_URL: Optional[str] = os.getenv("SUPABASE_URL") or os.getenv("NEXT_PUBLIC_SUPABASE_URL")
    SUPABASE_KEY: Optional[str] = os.getenv("SUPABASE_SERVICE_ROLE_KEY")

    # API server configuration
    API_HOST: str = os.getenv("FLOWLINE_CORE_HOST", "0.0.0.0")
    API_PORT: int = int(os.getenv("FLOWLINE_CORE_PORT", "7779"))

    # Debug mode (set FLOWLINE_CORE_DEBUG=true to enable)
    DEBUG: bool = os.getenv("FLOWLINE_CORE_DEBUG", "").lower() in ("true", "1", "yes")

    # Engine limits
    # Wait nodes block the whole run, so their duration is capped (1 hour)
    WAIT_MAX_SECONDS: float = float(os.getenv("FLOWLINE_CORE_WAIT_MAX_SECONDS", "3600"))
    # Optional cap on node visits per run (loop bodies count once per item); unset means no cap
    MAX_NODE_VISITS: Optional[int] = int(os.getenv("FLOWLINE_CORE_MAX_NODE_VISITS") or 0) or None

    # HTTP request node timeout in seconds
    HTTP_TIMEOUT: float = float(os.getenv("FLOWLINE_CORE_HTTP_TIMEOUT", "30"))

    @classmethod
    def validate(cls) -> bool:
        """Validate configuration"""
        if cls.MODE not in ("solo", "prod"):
            print(f"[CONFIG] Error: unknown mode '{cls.MODE}' (expected 'solo' or 'prod')")
            return False
        if cls.MODE == "prod":
            if not cls.SUPABASE_URL or not cls.SUPABASE_KEY:
                print("[CONFIG] Error: SUPABASE_URL and SUPABASE_KEY required for prod mode")
                return False
        return True

    @classmethod
    def get_storage(cls):
        """Get storage instance based on mode"""
        from src.storage import LocalJSONStorage, SupabaseStorage

        if cls.MODE == "prod":
            if not cls.SUPABASE_URL or not cls.SUPABASE_KEY:
                raise ValueError("SUPABASE_URL and SUPABASE_KEY required for prod mode")
            return SupabaseStorage(cls.SUPABASE_URL, cls.SUPABASE_KEY)
        else:
            return LocalJSONStorage(cls.STORAGE_PATH)
