"""Domain layer: transcript model, compression model, ports and errors."""
