"""Search AI chat history across Cursor's unified and per-workspace stores."""
