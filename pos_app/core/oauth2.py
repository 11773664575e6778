from fastapi.security import OAuth2PasswordBearer

# Token is read from the Authorization header
oauth2_scheme = OAuth2PasswordBearer(tokenUrl="/auth/login")
