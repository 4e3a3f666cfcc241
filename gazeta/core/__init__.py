# gazeta core: shared error types
