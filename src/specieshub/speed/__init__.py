"""Species-speed chart package: CSV dataset loading and plotly rendering."""
