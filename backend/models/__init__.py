from models.comment import Comment, CommentCreate, CommentUpdate, CommentListDTO, BasePageDTO
from models.result import ApiResult, SUCCESS_CODE, SUCCESS_MESSAGE
