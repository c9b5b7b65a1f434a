"""Boutique Northwind: catalogue, panier, commandes et encaissements sur la base SQLite Northwind."""
