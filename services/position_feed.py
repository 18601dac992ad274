"""
Position Feed Service Module

This module integrates with the vehicle position feed API. It handles
authentication and retrieval of current positions and position history for
fleet vehicles.

Key Features:
- Feed API authentication with token caching and one re-login on 401
- Current positions for a selection of vehicles (or all of them)
- Ordered position history for one vehicle and a time range
- Rotating file logging of every API interaction

Every transport or decoding problem is raised as FetchFailed so the poller
can retain its last good positions and retry on the next tick.
"""

import requests
import logging
from datetime import datetime, timezone, timedelta
from logging.handlers import RotatingFileHandler
import os

from utils.errors import FetchFailed
from utils.position_utils import parse_feed

class PositionFeedService:
    def __init__(self, base_url, company_id=None, username=None, password=None,
                 timeout=10, session=None, log_dir='logs'):
        self.logger = logging.getLogger('PositionFeedService')
        self._configure_logging(log_dir)

        self.base_url = base_url.rstrip('/')
        self.company_id = company_id
        self.username = username
        self.password = password
        self.timeout = timeout
        self.session = session or requests.Session()
        self._auth_token = None
        self.logger.info(f"PositionFeedService initialized with base_url: {self.base_url}, company_id: {company_id}")

    def _configure_logging(self, log_dir):
        if not log_dir or self.logger.handlers:
            return
        if not os.path.exists(log_dir):
            os.makedirs(log_dir)
            logging.debug(f"Created logs directory at {os.path.abspath(log_dir)}")

        file_handler = RotatingFileHandler(
            os.path.join(log_dir, 'position_feed.log'),
            maxBytes=10*1024*1024,  # 10MB file size
            backupCount=5
        )
        file_handler.setLevel(logging.DEBUG)
        file_handler.setFormatter(logging.Formatter(
            '%(asctime)s - %(name)s - %(levelname)s - %(funcName)s:%(lineno)d - %(message)s'
        ))
        self.logger.addHandler(file_handler)
        self.logger.debug("Configured rotating file handler with 10MB file size and 5 backups")

    def authenticate(self):
        """
        Authenticate with the feed API and cache the access token.

        Returns:
            str: Authentication token, or None when the feed needs no credentials

        Raises:
            FetchFailed: If the authentication request fails or returns no token
        """
        if not self.username:
            self.logger.debug("No feed credentials configured, skipping authentication")
            return None

        auth_url = f"{self.base_url}/auth"
        self.logger.info("Attempting to authenticate with the position feed")
        try:
            response = self.session.post(
                auth_url,
                headers={"Content-Type": "application/json"},
                json={"username": self.username, "password": self.password},
                timeout=self.timeout
            )
            self.logger.debug(f"Auth response status code: {response.status_code}")
            response.raise_for_status()
        except requests.exceptions.RequestException as e:
            self.logger.error(f"Authentication request failed: {e}", exc_info=True)
            raise FetchFailed("Authentication with the position feed failed", cause=e)

        # Strip quotes from token if present
        token = response.text.strip().strip('"')
        if not token:
            self.logger.error("No token received in authentication response")
            raise FetchFailed("Position feed returned an empty token")
        self._auth_token = token
        self.logger.info("Authentication successful")
        return token

    def _headers(self):
        headers = {"Content-Type": "application/json"}
        token = self._auth_token or self.authenticate()
        if token:
            headers["Authorization"] = f"Bearer {token}"
        return headers

    def _get_json(self, url, params=None):
        for attempt in (1, 2):
            try:
                response = self.session.get(url, headers=self._headers(), params=params, timeout=self.timeout)
                self.logger.debug(f"GET {url} -> {response.status_code}")
                if response.status_code == 401 and attempt == 1 and self.username:
                    self.logger.info("Feed token rejected, re-authenticating")
                    self._auth_token = None
                    continue
                response.raise_for_status()
                return response.json()
            except requests.exceptions.RequestException as e:
                self.logger.error(f"Request to {url} failed: {e}", exc_info=True)
                raise FetchFailed(f"Request to {url} failed", cause=e)
            except ValueError as e:
                self.logger.error(f"Response from {url} is not valid JSON: {e}")
                raise FetchFailed(f"Response from {url} is not valid JSON", cause=e)
        raise FetchFailed(f"Request to {url} was not authorized")

    def _params(self, **extra):
        params = {key: value for key, value in extra.items() if value is not None}
        if self.company_id:
            params["company"] = self.company_id
        return params

    def get_positions(self, vehicle_ids=None):
        """
        Fetch the current position of the selected vehicles.

        Args:
            vehicle_ids (iterable): Vehicle ids to fetch, or None for all vehicles

        Returns:
            tuple: (samples, statuses) from parse_feed. Records for vehicles
                   outside the selection are left out.

        Raises:
            FetchFailed: On any transport, HTTP or decoding error
        """
        selected = None if vehicle_ids is None else {str(v) for v in vehicle_ids}
        params = self._params(ids=",".join(sorted(selected)) if selected else None)
        self.logger.info(f"Fetching positions for {'all vehicles' if selected is None else len(selected)}")

        records = self._get_json(f"{self.base_url}/auta/locations", params=params)
        if not isinstance(records, list):
            raise FetchFailed("Position feed returned a non-list payload")

        samples, statuses = parse_feed(records)
        if selected is not None:
            samples = [s for s in samples if s.vehicle_id in selected]
        self.logger.info(f"Retrieved {len(samples)} positions")
        return samples, statuses

    def get_history(self, vehicle_id, start=None, end=None):
        """
        Fetch the ordered position history of one vehicle.

        Args:
            vehicle_id (str): Vehicle identifier
            start (datetime): Range start, defaults to 24 hours before end
            end (datetime): Range end, defaults to now

        Returns:
            list: PositionSamples in the order the feed returned them

        Raises:
            FetchFailed: On any transport, HTTP or decoding error
        """
        end = end or datetime.now(timezone.utc)
        start = start or end - timedelta(hours=24)
        params = self._params(startDate=start.isoformat(), endDate=end.isoformat())
        self.logger.info(f"Fetching history for vehicle {vehicle_id} from {start} to {end}")

        records = self._get_json(f"{self.base_url}/auta/{vehicle_id}/history", params=params)
        if not isinstance(records, list):
            raise FetchFailed("History feed returned a non-list payload")
        samples, _ = parse_feed(records, vehicle_id=str(vehicle_id))
        self.logger.info(f"Retrieved {len(samples)} history points for vehicle {vehicle_id}")
        return samples
