"""
Session controller implementation.

Keeps a consistent view of who is signed in and whether their profile is
complete. Two independent sources write to the same state: the
controller's own calls (initialize, fetch_profile, sign_out,
update_profile) and notifications the auth service pushes at any time.
All writes go through a single snapshot so readers always see derived
flags that agree with the fields they come from.
"""

import asyncio
import logging
from typing import Any, Awaitable, Callable, Optional, Union

from pydantic import ValidationError as PydanticValidationError

from shared.exceptions import AuthenticationError

from .exceptions import (
    AuthServiceUnavailableError,
    AuthSessionMissingError,
    InvalidProfileUpdateError,
    InvalidSessionError,
    NoSessionError,
    ProfileNotFoundError,
    ProfileUpdateError,
)
from .interfaces import IAuthGateway, IProfileStore, Unsubscribe
from .models import (
    AuthEvent,
    AuthSession,
    AuthUser,
    Profile,
    ProfileUpdate,
    SessionState,
    SessionTimeouts,
)

logger = logging.getLogger(__name__)

StateListener = Callable[[SessionState], None]


class SessionController:
    """
    Authentication and profile-completeness state machine.

    The auth gateway and profile store are injected so the controller can
    run against Supabase in production and against fakes in tests.

    Ordering rules:
    - initialization_complete lives in the shared state and is read at
      notification time, never captured when subscribing.
    - At most one profile fetch runs at a time; extra requests are dropped.
      The fetch holds the lock until its remote call settles, even if the
      identity changes underneath it.
    - Changing or clearing the identity bumps a generation counter, and
      results that belong to an older generation are discarded, so a late
      profile fetch cannot resurrect a signed-out session. A fetch that
      finishes for a superseded user fetches again for the current one.
    """

    def __init__(
        self,
        auth: IAuthGateway,
        profiles: IProfileStore,
        timeouts: Optional[SessionTimeouts] = None,
    ):
        self._auth = auth
        self._profiles = profiles
        self._timeouts = timeouts or SessionTimeouts()

        self._state = SessionState()
        self._listeners: list[StateListener] = []
        self._unsubscribe: Optional[Unsubscribe] = None
        self._init_task: Optional[asyncio.Task] = None
        self._background: set[asyncio.Task] = set()

        self._generation = 0
        self._active_fetch: Optional[object] = None
        self._ceiling: Optional[asyncio.TimerHandle] = None
        self._closed = False

    @property
    def state(self) -> SessionState:
        """Current state snapshot."""
        return self._state

    @property
    def closed(self) -> bool:
        return self._closed

    # -------------------------------------------------------------------------
    # State publication
    # -------------------------------------------------------------------------

    def add_listener(self, listener: StateListener) -> Callable[[], None]:
        """
        Call `listener` with every new state snapshot.

        Returns:
            Function that removes the listener
        """
        self._listeners.append(listener)

        def remove() -> None:
            if listener in self._listeners:
                self._listeners.remove(listener)

        return remove

    def _update(self, **changes: Any) -> None:
        if self._closed:
            return
        new_state = self._state.model_copy(update=changes)
        if new_state == self._state:
            return
        self._state = new_state
        for listener in list(self._listeners):
            try:
                listener(new_state)
            except Exception:
                logger.exception("Session state listener failed")

    # -------------------------------------------------------------------------
    # Lifecycle
    # -------------------------------------------------------------------------

    def start(self) -> asyncio.Task:
        """
        Subscribe to auth notifications and begin initialization.

        Must be called from a running event loop. Calling it again returns
        the existing initialization task.
        """
        if self._closed:
            raise RuntimeError("Session controller is closed")
        if self._init_task is not None:
            return self._init_task

        # Notifications delivered before the task first runs must count as
        # newer than whatever the identity check returns.
        generation = self._generation
        self._update(started=True, loading=True)
        self._unsubscribe = self._auth.subscribe(self._handle_auth_change)
        self._init_task = asyncio.ensure_future(self.initialize(generation))
        return self._init_task

    async def wait_until_initialized(self) -> SessionState:
        """Start the controller if needed and wait for initialization."""
        task = self.start() if self._init_task is None else self._init_task
        await task
        return self._state

    def close(self) -> None:
        """
        Release the notification subscription and stop writing state.

        In-flight remote calls are not cancelled; their results are ignored.
        """
        if self._closed:
            return
        self._closed = True
        if self._unsubscribe is not None:
            self._unsubscribe()
            self._unsubscribe = None
        if self._ceiling is not None:
            self._ceiling.cancel()
            self._ceiling = None
        self._listeners.clear()

    async def __aenter__(self) -> "SessionController":
        self.start()
        return self

    async def __aexit__(self, *exc_info: Any) -> None:
        self.close()

    # -------------------------------------------------------------------------
    # Initialization
    # -------------------------------------------------------------------------

    async def initialize(self, generation: Optional[int] = None) -> None:
        """
        Resolve the stored credentials into a determinate state.

        Never raises: every failure ends in either an unauthenticated state
        or an authenticated one with or without a profile.

        Args:
            generation: Identity generation the caller observed when it
                scheduled initialization. Defaults to the current one.
        """
        if generation is None:
            generation = self._generation
        try:
            await self._resolve_identity(generation)
        except Exception:
            logger.warning(
                "Session initialization failed, retrying with stored session",
                exc_info=True,
            )
            await self._restore_stored_session(generation)
        finally:
            self._update(initialization_complete=True)
            logger.info("Session initialized: %s", self._state.phase.value)

    async def _resolve_identity(self, generation: int) -> None:
        try:
            user = await asyncio.wait_for(
                self._auth.get_current_user(),
                self._timeouts.identity_check,
            )
        except (asyncio.TimeoutError, AuthServiceUnavailableError) as exc:
            logger.warning(
                "Identity check did not complete (%s), using stored session",
                str(exc) or "timed out",
            )
            await self._restore_stored_session(generation)
            return
        except AuthenticationError as exc:
            logger.info("Stored credentials were rejected: %s", exc.message)
            await self._apply_initial_identity(None, None, generation)
            return

        if user is None:
            await self._apply_initial_identity(None, None, generation)
            return

        session = await asyncio.wait_for(
            self._auth.get_current_session(),
            self._timeouts.identity_check,
        )
        if session is None:
            logger.warning("User %s verified but no session is stored", user.id)
        await self._apply_initial_identity(user, session, generation)

    async def _restore_stored_session(self, generation: int) -> None:
        try:
            session = await asyncio.wait_for(
                self._auth.get_current_session(),
                self._timeouts.identity_check,
            )
        except Exception as exc:
            logger.warning("Stored session lookup failed: %s", str(exc) or "timed out")
            await self._apply_initial_identity(None, None, generation)
            return

        user = session.user if session is not None else None
        await self._apply_initial_identity(user, session, generation)

    async def _apply_initial_identity(
        self,
        user: Optional[AuthUser],
        session: Optional[AuthSession],
        generation: int,
    ) -> None:
        if generation != self._generation:
            # A notification replaced the identity while we were checking.
            # Its profile fetch was deferred to us, so settle it here.
            current = self._state
            if current.session is not None and current.user is not None:
                await self.fetch_profile(current.user.id)
            else:
                self._update(loading=False)
            return

        if user is None or session is None:
            self._drop_identity()
            return

        self._update(user=user, session=session)
        await self.fetch_profile(user.id)

    # -------------------------------------------------------------------------
    # Profile fetch
    # -------------------------------------------------------------------------

    async def fetch_profile(self, user_id: str) -> None:
        """
        Load the user's profile into the state.

        A call made while another fetch is in flight returns immediately.
        If the signed-in user changes while the lookup runs, the result is
        discarded and the current user's profile is fetched before the lock
        is released. Failures keep whatever profile is already cached and
        never raise.
        """
        if self._closed:
            return
        if self._active_fetch is not None:
            logger.debug("Profile fetch already in flight, dropping request for %s", user_id)
            return

        token = object()
        self._active_fetch = token
        self._ceiling = asyncio.get_running_loop().call_later(
            self._timeouts.profile_fetch_ceiling,
            self._release_fetch,
            token,
        )

        try:
            while True:
                generation = self._generation
                self._update(fetching_profile=True)
                await self._load_profile(user_id, generation)

                if self._closed or self._active_fetch is not token:
                    return
                if generation == self._generation:
                    return
                current = self._state
                if current.session is None or current.user is None:
                    return
                user_id = current.user.id
                logger.debug("Signed-in user changed during profile fetch, fetching for %s", user_id)
        finally:
            self._release_fetch(token)

    async def _load_profile(self, user_id: str, generation: int) -> None:
        try:
            profile = await asyncio.wait_for(
                self._profiles.get_by_id(user_id),
                self._timeouts.profile_fetch,
            )
        except asyncio.TimeoutError:
            logger.warning(
                "Profile fetch for %s timed out after %ss",
                user_id,
                self._timeouts.profile_fetch,
            )
        except Exception as exc:
            logger.warning("Profile fetch for %s failed: %s", user_id, exc)
        else:
            self._apply_fetched_profile(profile, generation)

    def _apply_fetched_profile(self, profile: Optional[Profile], generation: int) -> None:
        if generation != self._generation or self._state.session is None:
            logger.debug("Discarding profile fetched for a session that has since ended")
            return
        if profile is None:
            logger.debug("No profile row yet for the signed-in user")
        self._update(profile=profile)

    def _release_fetch(self, token: object) -> None:
        if self._active_fetch is not token:
            return
        self._active_fetch = None
        if self._ceiling is not None:
            self._ceiling.cancel()
            self._ceiling = None
        self._update(fetching_profile=False, loading=False)

    def _drop_identity(self, **changes: Any) -> None:
        # An in-flight fetch keeps the lock; its result is discarded on return.
        self._generation += 1
        self._update(
            user=None,
            session=None,
            profile=None,
            fetching_profile=False,
            loading=False,
            **changes,
        )

    # -------------------------------------------------------------------------
    # Notifications
    # -------------------------------------------------------------------------

    def _handle_auth_change(self, event: str, session: Optional[AuthSession]) -> None:
        if self._closed:
            return

        if event == AuthEvent.SIGNED_OUT or session is None or session.user is None:
            logger.info("Auth service reported no session (%s)", event)
            self._drop_identity(signing_out=False)
            return

        user = session.user
        current = self._state.user
        if current is None or current.id != user.id:
            self._generation += 1
            self._update(user=user, session=session, profile=None)
        else:
            self._update(user=user, session=session)

        if event == AuthEvent.SIGNED_IN and self._state.initialization_complete:
            self._spawn(self.fetch_profile(user.id))

    def _spawn(self, coro: Awaitable[None]) -> None:
        task = asyncio.ensure_future(coro)
        self._background.add(task)
        task.add_done_callback(self._background.discard)

    # -------------------------------------------------------------------------
    # Sign-out
    # -------------------------------------------------------------------------

    async def sign_out(self) -> None:
        """
        Sign the user out.

        Local state is cleared no matter what the auth service answers.
        """
        user = self._state.user
        logger.info("Signing out %s", user.id if user else "anonymous user")

        self._generation += 1
        self._update(signing_out=True, profile=None, fetching_profile=False, loading=False)

        try:
            await asyncio.wait_for(self._auth.sign_out(), self._timeouts.sign_out)
        except AuthSessionMissingError:
            logger.debug("Session was already gone on the auth service")
        except asyncio.TimeoutError:
            logger.warning("Remote sign-out timed out, clearing local session anyway")
        except Exception as exc:
            logger.warning("Remote sign-out failed (%s), clearing local session anyway", exc)
        finally:
            self._drop_identity(signing_out=False)
            try:
                await self._auth.clear_local_cache()
            except Exception as exc:
                logger.debug("Could not clear cached auth tokens: %s", exc)

    # -------------------------------------------------------------------------
    # Profile update
    # -------------------------------------------------------------------------

    async def update_profile(
        self,
        changes: Union[ProfileUpdate, dict[str, Any]],
    ) -> Profile:
        """
        Update the signed-in user's profile.

        Args:
            changes: Fields to change

        Returns:
            The updated profile, also cached in the state

        Raises:
            NoSessionError: If no user is signed in
            InvalidProfileUpdateError: If the changes contain unknown or invalid fields
            InvalidSessionError: If the live session belongs to someone else
            ProfileNotFoundError: If the user has no profile row
            ProfileUpdateError: If the store fails for any other reason
        """
        user = self._state.user
        if user is None:
            raise NoSessionError()

        if not isinstance(changes, ProfileUpdate):
            try:
                changes = ProfileUpdate(**changes)
            except PydanticValidationError as exc:
                raise InvalidProfileUpdateError(exc.errors(include_url=False)) from exc

        try:
            live = await asyncio.wait_for(
                self._auth.get_current_session(),
                self._timeouts.identity_check,
            )
        except Exception as exc:
            raise InvalidSessionError(str(exc) or "session lookup timed out") from exc
        if live is None or live.user is None or live.user.id != user.id:
            raise InvalidSessionError("session does not belong to the signed-in user")

        fields = changes.model_dump(exclude_unset=True, mode="json")
        try:
            profile = await asyncio.wait_for(
                self._profiles.update(user.id, fields),
                self._timeouts.profile_update,
            )
        except asyncio.TimeoutError as exc:
            raise ProfileUpdateError(user.id, "timed out") from exc
        except Exception as exc:
            raise ProfileUpdateError(user.id, str(exc)) from exc

        if profile is None:
            raise ProfileNotFoundError(user.id)

        current = self._state
        if current.session is not None and current.user is not None and current.user.id == user.id:
            self._update(profile=profile)
        return profile
