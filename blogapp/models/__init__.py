from blogapp.models.author import Author
from blogapp.models.category import Category
from blogapp.models.comment import Comment
from blogapp.models.post import Post

__all__ = ["Author", "Category", "Comment", "Post"]
