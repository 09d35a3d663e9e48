"""Domain logic shared by the API and the studio GUI."""
