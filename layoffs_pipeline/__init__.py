"""
Layoffs cleaning and outlier analysis pipeline.
"""

__version__ = "1.0.0"
