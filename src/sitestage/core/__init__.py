"""Site assembly core: addresses, site tree, navigation and rendering."""
