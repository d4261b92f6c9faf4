import os

# in-memory database for anything that imports the web app
os.environ.setdefault("SKIMMER_DATABASE_URL", "sqlite://")
