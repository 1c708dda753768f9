"""Request/response schemas shared between the Shutterclub API and its clients."""
