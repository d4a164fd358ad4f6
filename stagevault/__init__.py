"""StageVault: a catalogue of musical theatre recordings."""
