"""Provider adapters: raw statement text (or cell grid) to import candidates.

Each module exposes ``parse(raw, mappings=None, *, config=None)`` returning a
list of :class:`~statement_import.models.ImportedTransaction`. Adapters never
raise on malformed input; unparseable chunks are skipped.
"""
