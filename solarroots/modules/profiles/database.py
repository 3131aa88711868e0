class ProfileDatabase:
    """Queries against the profiles table. Callers own the connection."""

    @staticmethod
    def get_profile(conn, email):
        """Get a profile by normalized email"""
        cursor = conn.cursor()
        cursor.execute("""
            SELECT id, email, name, bio, password_hash, created_at, updated_at
            FROM profiles WHERE email = ?
        """, (email,))
        row = cursor.fetchone()
        return dict(row) if row else None

    @staticmethod
    def get_password_hash(conn, email):
        """Get only the stored password digest, or None"""
        cursor = conn.cursor()
        cursor.execute("SELECT password_hash FROM profiles WHERE email = ?", (email,))
        row = cursor.fetchone()
        return row['password_hash'] if row else None

    @staticmethod
    def upsert_with_password(conn, email, name, bio, password_hash, now):
        """Create the profile, or overwrite name, bio and digest when it exists"""
        cursor = conn.cursor()
        cursor.execute("""
            INSERT INTO profiles (email, name, bio, password_hash, created_at, updated_at)
            VALUES (?, ?, ?, ?, ?, ?)
            ON CONFLICT(email) DO UPDATE SET
                name = excluded.name,
                bio = excluded.bio,
                password_hash = excluded.password_hash,
                updated_at = excluded.updated_at
        """, (email, name, bio, password_hash, now, now))
        conn.commit()

    @staticmethod
    def upsert_keep_password(conn, email, name, bio, now):
        """Update name and bio, leaving the stored digest untouched"""
        cursor = conn.cursor()
        cursor.execute("""
            INSERT INTO profiles (email, name, bio, created_at, updated_at)
            VALUES (?, ?, ?, ?, ?)
            ON CONFLICT(email) DO UPDATE SET
                name = excluded.name,
                bio = excluded.bio,
                updated_at = excluded.updated_at
        """, (email, name, bio, now, now))
        conn.commit()
