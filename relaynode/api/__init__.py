"""HTTP API: schemas, translation, routes and the app factory."""
