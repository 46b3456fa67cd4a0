"""MediRoutines backend application package."""
