"""Infrastructure layer: logging, metrics, auth collaborators and realtime fan-out."""
