"""
Undo/Redo History Manager for the Pixel Grid Editor

Manages a bounded stack of LayerTree snapshots with undo/redo, absolute
jumps and a debounced push that coalesces rapid submissions (brush strokes,
slider drags) into one entry.
"""

import copy
import logging

from PyQt5.QtCore import QTimer

from pixelgrid.constants import HISTORY_MAX_SIZE, DEFAULT_DEBOUNCE_MS


class HistoryManager:
	"""Manages undo/redo history with state snapshots

	Entries are {'data': snapshot, 'description': str}. Entries after
	current_index are the redo branch and are dropped by the next push.
	"""
	
	def __init__(self, max_history=HISTORY_MAX_SIZE):
		"""
		Initialize the history manager
		
		Args:
			max_history: Maximum number of states to keep in history
		"""
		self._logger = logging.getLogger('History')
		self.max_history = max_history
		self.history = []  # List of state snapshots
		self.current_index = -1  # Current position in history (-1 means no states)
		self._listeners = []  # Callbacks to notify on state changes
		
		# Debounce timer is created on first push_state_debounced
		self._debounce_timer = None
		self._pending_state = None
		self._pending_description = ""
	
	def push_state(self, state_data, description=""):
		"""
		Save a new state to history
		
		Any pending debounced push is discarded: a direct push supersedes it.
		
		Args:
			state_data: Snapshot dict to save (deep copied)
			description: Optional description of the change
		"""
		self._cancel_pending()
		self._commit(state_data, description)
	
	def _commit(self, state_data, description):
		# If we're not at the end of history, remove everything after current position
		if self.current_index < len(self.history) - 1:
			self.history = self.history[:self.current_index + 1]
		
		snapshot = {
			'data': copy.deepcopy(state_data),
			'description': description
		}
		
		self.history.append(snapshot)
		self.current_index += 1
		
		# Trim history if it exceeds max_history
		if len(self.history) > self.max_history:
			self.history.pop(0)
			self.current_index -= 1
		
		self._notify_listeners()
		
		self._logger.debug(f"State saved: {description} (index: {self.current_index}, total: {len(self.history)})")
	
	# ========================================
	# Debounce
	# ========================================
	
	def push_state_debounced(self, state_data, delay_ms=DEFAULT_DEBOUNCE_MS, description=""):
		"""
		Schedule a push after a quiet period
		
		Each call replaces the pending snapshot and restarts the timer, so
		only the last submission within the quiet period is committed.
		Needs a running Qt event loop for the timer to fire.
		
		Args:
			state_data: Snapshot dict (deep copied now, so later mutation of
				the caller's tree does not leak into the entry)
			delay_ms: Quiet period in milliseconds
			description: Optional description of the change
		"""
		self._pending_state = copy.deepcopy(state_data)
		self._pending_description = description
		
		if self._debounce_timer is None:
			self._debounce_timer = QTimer()
			self._debounce_timer.setSingleShot(True)
			self._debounce_timer.timeout.connect(self._on_debounce_timeout)
		
		self._debounce_timer.stop()
		self._debounce_timer.start(delay_ms)
	
	def _on_debounce_timeout(self):
		"""Called by timer to commit the pending push"""
		self.flush_pending()
	
	def flush_pending(self):
		"""
		Commit a pending debounced push immediately
		
		Returns:
			True if a pending push was committed
		"""
		if self._pending_state is None:
			return False
		state, description = self._pending_state, self._pending_description
		self._cancel_pending()
		self._commit(state, description)
		return True
	
	def has_pending(self):
		"""Check if a debounced push is waiting for its timer"""
		return self._pending_state is not None
	
	def _cancel_pending(self):
		if self._debounce_timer is not None:
			self._debounce_timer.stop()
		self._pending_state = None
		self._pending_description = ""
	
	# ========================================
	# Navigation
	# ========================================
	
	def undo(self):
		"""
		Move back one state in history
		
		Returns:
			Dictionary containing the previous state, or None if at beginning
		"""
		if not self.can_undo():
			self._logger.debug("Cannot undo - at beginning of history")
			return None
		
		self.current_index -= 1
		entry = self.history[self.current_index]
		
		self._notify_listeners()
		
		self._logger.debug(f"Undo to: {entry['description']} (index: {self.current_index})")
		return copy.deepcopy(entry['data'])
	
	def redo(self):
		"""
		Move forward one state in history
		
		Returns:
			Dictionary containing the next state, or None if at end
		"""
		if not self.can_redo():
			self._logger.debug("Cannot redo - at end of history")
			return None
		
		self.current_index += 1
		entry = self.history[self.current_index]
		
		self._notify_listeners()
		
		self._logger.debug(f"Redo to: {entry['description']} (index: {self.current_index})")
		return copy.deepcopy(entry['data'])
	
	def jump_to_state(self, index):
		"""
		Move the cursor to an absolute position
		
		Args:
			index: Target history index
		
		Returns:
			Dictionary containing the state at index, or None if out of range
		"""
		if not isinstance(index, int) or not 0 <= index < len(self.history):
			self._logger.debug(f"Cannot jump to {index!r} - out of range")
			return None
		
		self.current_index = index
		self._notify_listeners()
		return copy.deepcopy(self.history[index]['data'])
	
	def can_undo(self):
		"""Check if undo is available"""
		return self.current_index > 0
	
	def can_redo(self):
		"""Check if redo is available"""
		return self.current_index < len(self.history) - 1
	
	def clear(self):
		"""Clear all history, discarding any pending debounced push"""
		self._cancel_pending()
		self.history = []
		self.current_index = -1
		self._notify_listeners()
		self._logger.debug("History cleared")
	
	# ========================================
	# Listeners
	# ========================================
	
	def add_listener(self, callback):
		"""
		Add a listener to be notified when history state changes
		
		Args:
			callback: Function to call when history changes (receives get_state_for_ui())
		"""
		self._listeners.append(callback)
	
	def remove_listener(self, callback):
		"""Remove a listener"""
		if callback in self._listeners:
			self._listeners.remove(callback)
	
	def _notify_listeners(self):
		"""Notify all listeners of history state change"""
		state = self.get_state_for_ui()
		for callback in list(self._listeners):
			try:
				callback(state)
			except Exception as e:
				self._logger.error(f"Error notifying listener: {e}", exc_info=True)
	
	def get_state_for_ui(self):
		"""Summary of the stack for undo/redo buttons and history panels"""
		return {
			'stack_size': len(self.history),
			'current_index': self.current_index,
			'can_undo': self.can_undo(),
			'can_redo': self.can_redo(),
		}
	
	# ========================================
	# Descriptions
	# ========================================
	
	def get_current_description(self):
		"""Get the description of the current state"""
		if 0 <= self.current_index < len(self.history):
			return self.history[self.current_index]['description']
		return ""
	
	def get_undo_description(self):
		"""Get the description of the state that would be restored by undo"""
		if self.can_undo():
			return self.history[self.current_index - 1]['description']
		return ""
	
	def get_redo_description(self):
		"""Get the description of the state that would be restored by redo"""
		if self.can_redo():
			return self.history[self.current_index + 1]['description']
		return ""
	
	def get_descriptions(self):
		"""Descriptions of every entry, oldest first"""
		return [entry['description'] for entry in self.history]
