"""
KAAB HUB — Student Q&A, Mentorship & Opportunity API
=====================================================
Students register, ask and answer questions, vote on each other's content,
browse mentor profiles, and discover scholarships, workshops and events.
The question author's accepted answer earns its writer reputation.

Package layout::

    kaabhub/
    ├── config.py          # YAML → typed Python config
    ├── constants.py       # Reputation grant, field allow-lists, limits
    ├── errors.py          # Exception taxonomy → HTTP status codes
    ├── database/
    │   ├── engine.py      # SQLAlchemy engine + session helpers
    │   ├── models.py      # All ORM models
    │   └── seed.py        # Mentor catalogue seeder
    ├── engine/
    │   ├── votes.py       # Pure up/down vote toggle rules
    │   └── acceptance.py  # Pure answer-acceptance planning
    ├── services/
    │   ├── user_service.py        # Registration, login, profiles
    │   ├── question_service.py    # Question CRUD, views, tags
    │   ├── answer_service.py      # Answer CRUD, comments, acceptance
    │   ├── vote_service.py        # Persisted vote toggles
    │   ├── opportunity_service.py # Scholarship/event listings
    │   ├── mentor_service.py      # Mentor directory
    │   └── room_hub.py            # Per-question WebSocket rooms
    └── api/
        ├── main.py        # FastAPI app factory
        ├── context.py     # AppContext (engine, config, hub, limiter)
        ├── deps.py        # JWT + session dependencies
        ├── auth.py        # Register / login
        └── routes/        # REST endpoints per resource
"""

__version__ = "0.1.0"
