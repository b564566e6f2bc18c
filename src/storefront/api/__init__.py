"""HTTP edge shared by every component router."""
