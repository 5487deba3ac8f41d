"""
Application Layer

Orchestrates domain objects and audio adapters to fulfil player use cases.

Structure:
- interfaces/: Port interfaces for audio backends
- services/: The playback engine and its session binding
"""
