# boutique.config
from pathlib import Path
import os
from dotenv import load_dotenv

# Chemin du projet puis chargement explicite du .env
BASE_DIR = Path(__file__).resolve().parent.parent
ENV_PATH = BASE_DIR / ".env"
load_dotenv(dotenv_path=ENV_PATH, override=False)

"""
Configuration centrale de la boutique.

- Charge le fichier .env à la racine du projet (BASE_DIR/.env)
- Expose les secrets (JWT), la sécurité cookies, CORS/hosts
- Liste les emplacements candidats de la base Northwind (résolus dans boutique.infra.database)
"""

def _clean_env(v: str) -> str:
    """
    Nettoie une valeur d'environnement:
    - supprime les espaces et guillemets (simples, doubles) et backticks
    - retourne toujours une chaîne (jamais None)
    """
    return (v or "").strip().strip("'").strip('"').strip("`")

# Base Northwind: variable lue à chaque résolution (voir infra.database.resolve_db_path)
DB_PATH_ENV = "NORTHWIND_DB_PATH"
DB_PATH_CANDIDATES = (
    Path("northwind") / "northwind.db",  # recommandé
    Path("prisma") / "northwind.db",
    Path("northwind.db"),                # ancien emplacement
)

# Jetons de session (JWT HS256)
JWT_SECRET = _clean_env(os.getenv("JWT_SECRET") or "")
JWT_ALGORITHM = "HS256"
JWT_EXPIRES_SECONDS = int(os.getenv("JWT_EXPIRES_SECONDS", "3600"))

# Cookies / sécurité
COOKIE_SECURE = (os.getenv("COOKIE_SECURE", "false").lower() == "true")

# CORS (dev)
CORS_ORIGINS = [o.strip() for o in os.getenv("CORS_ORIGINS", "*").split(",") if o.strip()]
ALLOWED_HOSTS = [h.strip() for h in os.getenv("ALLOWED_HOSTS", "localhost,127.0.0.1").split(",") if h.strip()]

# Passerelle de paiement: montants reçus en centimes
PAYMENT_CURRENCY = _clean_env(os.getenv("PAYMENT_CURRENCY") or "EUR")
PAYMENT_MINOR_UNITS = 100
