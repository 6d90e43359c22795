"""Engine-agnostic core: data model, procedural generation and orbital math."""
