"""MealPlannr: recipe sharing across households and networks."""

__version__ = "1.0.0"
