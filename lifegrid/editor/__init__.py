"""
Interactive month grid editor

This package provides the annotation engine behind the life grid:

- Coordinates: cell keys, month indices and birth-anchored display rows
- Colors: preset palette and "next distinct color" suggestions
- Selection: click/hover/confirm state machine producing cell ranges
- Annotations: in-memory store of cell colors and labels
- Sync: debounced, single-flight persistence of the annotation map
- Client: HTTP collaborator for loading profiles and saving cell data

Key modules:
- config: Configuration management from environment variables
- session: Wires the pieces together for one displayed profile
"""
