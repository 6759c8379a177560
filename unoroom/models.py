from unoroom import db, bcrypt
from flask_login import UserMixin


class User(UserMixin, db.Model):
    __tablename__ = 'user'
    id = db.Column(db.Integer, primary_key=True)
    username = db.Column(db.String(64), unique=True, nullable=False, index=True)
    password_hash = db.Column(db.String(256), nullable=False)
    wins = db.Column(db.Integer, nullable=False, default=0, server_default='0')

    def set_password(self, password):
        self.password_hash = bcrypt.generate_password_hash(password).decode('utf-8')

    def check_password(self, password):
        return bcrypt.check_password_hash(self.password_hash, password)

    @classmethod
    def find_by_username(cls, username):
        """Case-insensitive lookup; usernames are unique regardless of case."""
        if not username:
            return None
        return cls.query.filter(db.func.lower(cls.username) == username.lower()).first()

    def to_dict(self):
        return {
            'id': self.id,
            'username': self.username,
            'wins': self.wins or 0,
        }
