"""Adapters between the node model and external formats.

This package provides codecs for:
- JSON-LD documents (context resolution, compaction via pyld)
- RDF quad streams (Turtle, N-Triples, N-Quads, TriG, JSON-LD via rdflib)
- Spreadsheet workbooks (flatten/unflatten to XLSX via openpyxl)
"""
