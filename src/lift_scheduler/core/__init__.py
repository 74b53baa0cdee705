"""Program model, template library, and plan expansion."""
