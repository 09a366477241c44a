"""kswitch - interactive kexec kernel switcher."""

__version__ = "0.1.0"
