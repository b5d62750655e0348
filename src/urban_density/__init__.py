"""Urban density estimation from OpenStreetMap POI counts."""
