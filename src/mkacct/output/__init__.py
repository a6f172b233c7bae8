"""Terminal rendering: themed console, usage screen, confirmation prompt."""
