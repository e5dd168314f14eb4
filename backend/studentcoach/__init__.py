"""Student/coach tutoring backend."""
