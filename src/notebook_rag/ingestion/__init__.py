"""
Ingestion — document loading, chunking, and embedding into the vector store.

This module is responsible for the ETL-like pipeline that converts raw
sources (PDF, CSV, web pages) into embedded chunks stored in a named
vector-store collection.
"""
