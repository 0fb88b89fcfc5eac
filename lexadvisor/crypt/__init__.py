"""Password hashing (bcrypt) and the sign-up password rule."""
