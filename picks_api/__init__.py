"""Sports picks API: free and premium match predictions, blog and administration."""

__version__ = "1.0.0"
