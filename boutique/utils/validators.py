"""Règles de saisie partagées par les modèles Pydantic de l'API (inscription, changement de mot de passe)."""
import re

USERNAME_RE = re.compile(r"^[A-Za-z0-9_.-]{3,40}$")

# (motif requis, message si absent), dans l'ordre de vérification
PASSWORD_RULES = (
    (re.compile(r"[A-Z]"), "Le mot de passe doit contenir au moins une majuscule"),
    (re.compile(r"[a-z]"), "Le mot de passe doit contenir au moins une minuscule"),
    (re.compile(r"\d"), "Le mot de passe doit contenir au moins un chiffre"),
    (re.compile(r"[!@#$%^&*()_+\-=\[\]{};:'\"\\|,.<>/?]"), "Le mot de passe doit contenir au moins un caractère spécial"),
)


def validate_password_strength(v: str) -> str:
    for pattern, message in PASSWORD_RULES:
        if not pattern.search(v):
            raise ValueError(message)
    return v


def validate_username(v: str) -> str:
    """Le nom d'utilisateur sert aussi de CustomerID Northwind et d'identifiant de panier."""
    v = (v or "").strip()
    if not USERNAME_RE.match(v):
        raise ValueError("Nom d'utilisateur invalide (3 à 40 caractères: lettres, chiffres, . _ -)")
    return v
