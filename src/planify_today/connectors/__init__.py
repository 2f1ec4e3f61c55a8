"""Host-side adapters: console, timers, notifications, process launching."""
