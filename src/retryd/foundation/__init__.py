"""Foundation layer: errors and configuration shared by the runtime."""
