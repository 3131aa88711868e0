class SubscriptionDatabase:
    """Queries against the subscriptions table. Callers own the connection."""

    @staticmethod
    def get_subscription(conn, email):
        """Get a subscription by normalized email"""
        cursor = conn.cursor()
        cursor.execute("""
            SELECT email, confirmed, confirmation_token FROM subscriptions WHERE email = ?
        """, (email,))
        row = cursor.fetchone()
        return dict(row) if row else None

    @staticmethod
    def create_pending(conn, email, token, now):
        """Insert a new unconfirmed subscription holding a fresh token"""
        cursor = conn.cursor()
        cursor.execute("""
            INSERT INTO subscriptions (email, created_at, updated_at, confirmed,
                                       confirmation_token, token_created_at)
            VALUES (?, ?, ?, 0, ?, ?)
        """, (email, now, now, token, now))
        conn.commit()

    @staticmethod
    def touch_pending(conn, email, now):
        """Refresh updated_at on a pending subscription, keeping its token"""
        cursor = conn.cursor()
        cursor.execute("""
            UPDATE subscriptions SET updated_at = ? WHERE email = ?
        """, (now, email))
        conn.commit()

    @staticmethod
    def reissue_token(conn, email, token, now):
        """Store a token on a pending subscription that has none (legacy rows)"""
        cursor = conn.cursor()
        cursor.execute("""
            UPDATE subscriptions
            SET confirmation_token = ?, token_created_at = ?, updated_at = ?
            WHERE email = ?
        """, (token, now, now, email))
        conn.commit()

    @staticmethod
    def mark_confirmed(conn, email, now):
        """Confirm a subscription and clear its token"""
        cursor = conn.cursor()
        cursor.execute("""
            UPDATE subscriptions
            SET confirmed = 1, confirmation_token = NULL, updated_at = ?
            WHERE email = ?
        """, (now, email))
        conn.commit()
        return cursor.rowcount > 0
