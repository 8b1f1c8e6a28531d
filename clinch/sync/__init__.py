"""Sync — populate the registry from deployment tool output.

- Ingestion: parse Foundry broadcast transcripts into candidate records
- Sync: run candidates through conflict resolution and persist them
"""
