from .cli import LogProgressAdapter, RichProgressAdapter, create_progress_callback

__all__ = ['LogProgressAdapter', 'RichProgressAdapter', 'create_progress_callback']
