from resonant.audio.extractor import (
    create_harmonic_series,
    extract_frequencies,
    frame_sample_points,
)
