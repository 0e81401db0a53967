"""Infrastructure layer: settings, logging and Firestore access."""
