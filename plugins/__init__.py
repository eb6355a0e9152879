"""Bot plugins: scheduled event reminders and player presence."""
