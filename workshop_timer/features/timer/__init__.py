"""Timer feature module: state model, room sessions and HTTP endpoints"""
