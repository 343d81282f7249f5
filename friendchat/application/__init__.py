"""
APPLICATION LAYER - Use Cases & Orchestration

This layer contains:
- commands/  → Write operations (friend requests, messaging, account settings)
- queries/   → Read operations (conversation view, friends, search, history)
- services/  → Orchestration shared by several use cases
               (messaging permissions, conversation view, live sync)
- dto/       → Data Transfer Objects
- common/    → Shared interfaces (Command, Query base classes)

Rules:
- Depends on Domain layer only
- No HTTP/framework code here
- Coordinates entities, repositories, change feed
"""
