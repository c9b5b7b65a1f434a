# module boutique.customers.models
"""Structure de mise à jour de la fiche client.
Chaque champ modifiable de Customers est déclaré explicitement; un champ absent de la requête
n'est pas touché, un champ inconnu est refusé.
"""
from typing import Dict, Optional

from pydantic import BaseModel, ConfigDict, Field

# Attribut Pydantic -> colonne Customers
CUSTOMER_COLUMNS: Dict[str, str] = {
    "company_name": "CompanyName",
    "contact_name": "ContactName",
    "contact_title": "ContactTitle",
    "address": "Address",
    "city": "City",
    "region": "Region",
    "postal_code": "PostalCode",
    "country": "Country",
    "phone": "Phone",
    "fax": "Fax",
}


class CustomerUpdate(BaseModel):
    model_config = ConfigDict(extra="forbid", str_strip_whitespace=True)

    company_name: Optional[str] = Field(None, min_length=1, max_length=40)
    contact_name: Optional[str] = Field(None, max_length=30)
    contact_title: Optional[str] = Field(None, max_length=30)
    address: Optional[str] = Field(None, max_length=60)
    city: Optional[str] = Field(None, max_length=15)
    region: Optional[str] = Field(None, max_length=15)
    postal_code: Optional[str] = Field(None, max_length=10)
    country: Optional[str] = Field(None, max_length=15)
    phone: Optional[str] = Field(None, max_length=24)
    fax: Optional[str] = Field(None, max_length=24)

    def to_columns(self) -> Dict[str, Optional[str]]:
        """Champs effectivement fournis, indexés par nom de colonne."""
        return {CUSTOMER_COLUMNS[k]: v for k, v in self.model_dump(exclude_unset=True).items()}
