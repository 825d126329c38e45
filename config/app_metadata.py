PAGE_TITLE = "Earthquakes and Plate Boundaries"

COUNTRIES_URL = (
    "https://services.arcgis.com/P3ePLMYs2RVChkJx/arcgis/rest/services/"
    "World_Countries_(Generalized)/FeatureServer/0"
)
PLATES_URL = (
    "https://services2.arcgis.com/cFEFS0EWrhfDeVw9/arcgis/rest/services/"
    "plate_tectonics_boundaries/FeatureServer/0"
)

LEGEND_EXPLANATION = [
    "Each sphere is an earthquake of magnitude 5.5 or greater, placed at the depth "
    "of its hypocenter below the surface.",
    "Sphere size and colour both follow magnitude: small pale spheres are moderate "
    "events, large dark red spheres are magnitude 7 and above.",
    "White lines trace the boundaries between tectonic plates, where most large "
    "earthquakes happen.",
    "Depths are exaggerated six times by default so that deep events stand out; "
    "use the toggle to switch to real depth.",
]

ABOUT_NOTES = [
    "Earthquake data comes from the local CSV file configured with QUAKE_CSV_PATH; "
    "scripts/download_earthquakes.py refreshes it from the USGS event service.",
    "Country outlines and plate boundaries are read from public ArcGIS feature services.",
    "The globe turns slowly until you drag it or zoom to an earthquake.",
]
