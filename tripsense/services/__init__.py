"""
Service implementations for TripSense.

Services are the running components of the application, each responsible
for a specific piece of functionality. They communicate through events.
"""
