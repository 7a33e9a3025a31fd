"""
Audio file collaborators: loading recordings and writing results.

Uses lazy imports so the core stays importable without the audio stack.
"""

__all__ = [
    "LoadedAudio",
    "SampleLoader",
    "create_sample_loader",
    "WavSampleWriter",
    "SessionWriter",
    "TextSessionWriter",
    "JSONSessionWriter",
    "create_session_writer",
]


def __getattr__(name: str):
    """Lazy load modules with heavy dependencies."""
    if name in ("LoadedAudio", "SampleLoader", "create_sample_loader"):
        from spectramix.io import loader
        return getattr(loader, name)
    elif name in __all__:
        from spectramix.io import writer
        return getattr(writer, name)
    raise AttributeError(f"module {__name__!r} has no attribute {name!r}")
