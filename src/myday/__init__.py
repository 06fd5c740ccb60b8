"""myday: task/list core of a personal to-do application."""

__version__ = "0.1.0"
